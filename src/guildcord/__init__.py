"""
Guildcord - Guild-Scoped Command Framework for Discord Bots

Guildcord sits on top of py-cord and gives a bot that serves many guilds at once a
prefix command layer with per-guild state.

Core Components:

- **Commands**: Permission-guarded prefix commands with per-guild permission
  overrides, cooldowns and aliases
- **Dispatch**: Guild and private command handlers that parse a message into a
  command event and decide whether the invoker may run the command
- **Permissions**: Tiered levels (user, master, owner, application owner,
  creator) resolved from guild membership and process-wide access lists
- **Schedulers**: Cooldown expiry, rotating presence and a periodic alive check

Usage:
    from guildcord.main import main
    main()  # Starts the bot
"""
