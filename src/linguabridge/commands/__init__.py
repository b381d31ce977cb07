"""Discord bot commands (!link, !show-links, !set-language, etc.).

- :mod:`linguabridge.commands.links` -- ``!set-language``,
  ``!remove-language``, ``!link``, ``!unlink``, ``!show-links``

Load all cogs during bot startup::

    for ext in COMMAND_EXTENSIONS:
        await bot.load_extension(ext)
"""

COMMAND_EXTENSIONS: list[str] = [
    "linguabridge.commands.links",
]
