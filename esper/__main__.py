# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .esperc import main

raise SystemExit(main())
