from webworker.server import main


main()
