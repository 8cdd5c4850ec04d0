"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the bookkeeping core.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. balance.py - Posting sign law and net balance of the books
2. journal.py - Append-only journal growth and silent rejection
3. pairing.py - Paired legs stay equal under every change
4. determinism.py - Replay rebuilds identical ledgers

These tests use hypothesis for property-based testing.
"""
