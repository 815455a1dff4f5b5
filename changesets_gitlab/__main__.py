from changesets_gitlab.cli.app import main

main()
