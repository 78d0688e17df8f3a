"""Pure policy rules: value resolution, change detection and agreement snapshots.

Nothing here touches the database; services load rows and pass them in.
"""
