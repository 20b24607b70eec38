"""
Suggestions Branch
Handles user suggestions with voting, discussion threads and admin approval.

Structure:
- branch.py: Main Suggestions class, slash commands and on_message listener
- workflow.py: submission, voting, decisions and channel setup (no Discord calls)
- store.py: in-memory suggestion store and ID generation
- state.py: branch state (store, channel settings, per-suggestion locks)
- handlers.py: runs workflow effects against Discord
- presentation.py: card, log and config embeds
- views.py: VoteButton (dynamic vote button) and SuggestionView
- helpers.py: config and permission helpers
"""

from .branch import Suggestions

__all__ = ['Suggestions', 'setup']

async def setup(bot):
    """Load the Suggestions branch."""
    await bot.add_cog(Suggestions(bot))
