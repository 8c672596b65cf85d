from gate.main import main

main()
