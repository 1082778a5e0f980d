from envbind.cli import main

raise SystemExit(main())
