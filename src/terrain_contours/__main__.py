from terrain_contours.cli import main

raise SystemExit(main())
