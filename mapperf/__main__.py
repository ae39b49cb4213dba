from mapperf.cli import main

main()
