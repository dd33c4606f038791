"""
Directory caching package.

Holds the last fetched employee directory in process memory. Entries never
expire on their own; writes invalidate explicitly.
"""
