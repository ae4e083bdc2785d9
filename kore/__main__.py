# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
import sys

from kore.unreturnc import main

if __name__ == "__main__":
	sys.exit(main())
