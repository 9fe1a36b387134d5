"""
State layer.

Components:
- store.py: StateStore (snapshot + loading flag)
- filters.py: FilterPipeline (search/status/owner joined with the snapshot)
- stats.py: StatsAggregator (totals over the filtered list)
- mutations.py: MutationCoordinator (remote write + optimistic local update)
- owners.py: OwnerDirectory (owner display names)
"""
