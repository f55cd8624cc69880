from pow_quote.cli import server_main

server_main()
