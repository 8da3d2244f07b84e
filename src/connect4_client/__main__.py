from connect4_client.main import main

if __name__ == "__main__":
    raise SystemExit(main())
