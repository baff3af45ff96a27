from contextcli.cli import main

raise SystemExit(main())
