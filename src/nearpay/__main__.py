from nearpay.main import main

main()
