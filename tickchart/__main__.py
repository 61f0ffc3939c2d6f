from tickchart.app import main

main()
