"""
General Branch
Help and latency commands.
"""

from .branch import General

__all__ = ['General', 'setup']

async def setup(bot):
    """Load the General branch."""
    await bot.add_cog(General(bot))
