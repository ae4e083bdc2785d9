# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared compiler infrastructure: spans, diagnostics, fresh names, ICEs."""
