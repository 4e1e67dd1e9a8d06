from landing_monitor.main import main


raise SystemExit(main())
