from reddi.cli.main import main

main()
