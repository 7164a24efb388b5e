from clarity_decode.main import main

main()
