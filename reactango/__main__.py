from reactango.cli import main

main()
