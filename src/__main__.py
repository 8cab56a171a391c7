from src.server import main

raise SystemExit(main())
