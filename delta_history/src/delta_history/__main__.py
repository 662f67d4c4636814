from delta_history.entry_points import main

main()
