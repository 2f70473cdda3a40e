from vaultbackup.cli import main

main()
