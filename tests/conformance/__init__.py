"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the networth engine.

The tests are organized by invariant:
1. test_conservation.py - Transfers redistribute, never create or destroy
2. test_interning.py - Stable, dense, idempotent name ids
3. test_history.py - Contiguous monthly frames and trailing sums
4. test_determinism.py - Replays and re-parses give identical results

These tests use hypothesis for property-based testing.
"""
