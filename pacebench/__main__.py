from pacebench.cli import main

raise SystemExit(main())
