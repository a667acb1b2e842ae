# Copyright Red Hat
#
# tests/diff/__init__.py - Tree diff diff tests
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
