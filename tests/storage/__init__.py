# Copyright Red Hat
#
# tests/storage/__init__.py - Tree diff storage tests
#
# This file is part of the treediff project.
#
# SPDX-License-Identifier: Apache-2.0
