from fqreport_cli import main

main()
