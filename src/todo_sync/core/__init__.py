"""
Core building blocks.

Components:
- models.py: data structures (TodoItem, Owner, StatusFilter, TodoStats)
- subject.py: multicast value streams with last-value replay
- operators.py: debounce / distinct_until_changed / combine_latest / map_stream
- scope.py: LifecycleScope bounding subscriptions and async work
- ports.py: Protocols the state layer depends on
"""
