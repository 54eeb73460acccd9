from style_inspector.cli import main

raise SystemExit(main())
