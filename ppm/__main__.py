from ppm.cli import main

main()
