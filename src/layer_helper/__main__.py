from layer_helper.cli import main

raise SystemExit(main())
