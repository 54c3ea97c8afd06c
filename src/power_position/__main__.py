from power_position.main import main

main()
