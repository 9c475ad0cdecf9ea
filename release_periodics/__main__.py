from release_periodics.main import main

main()
