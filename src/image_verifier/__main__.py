from image_verifier.cli import main

raise SystemExit(main())
