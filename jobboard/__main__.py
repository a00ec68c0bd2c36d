from jobboard.cli import main

raise SystemExit(main())
