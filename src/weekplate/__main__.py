from weekplate.cli import main

main()
