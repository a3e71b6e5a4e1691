from coursebase.seed.cli import seed_main

raise SystemExit(seed_main())
