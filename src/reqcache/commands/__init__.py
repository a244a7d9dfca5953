"""Built-in CLI sub-commands for reqcache.

* :mod:`~reqcache.commands.log` -- summarise and list event logs.
* :mod:`~reqcache.commands.cache` -- inspect saved cache snapshots.
* :mod:`~reqcache.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application registered on
the root app in :mod:`reqcache.app`.
"""
