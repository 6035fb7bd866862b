from smartorg.cli import main

main()
