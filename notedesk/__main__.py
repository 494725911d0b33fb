from notedesk.main import main

raise SystemExit(main())
