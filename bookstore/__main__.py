from bookstore.main import main

main()
