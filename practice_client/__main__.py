from practice_client.launcher import main

raise SystemExit(main())
