from blinker import Namespace

_signals = Namespace()

# Emitted after an answer has been written and committed.
# Arguments:
# - sender: the ReviewScheduler instance
# - user_id: int
# - card_id: int
# - quality: int (clamped, 0-5)
# - state: ReviewState after the answer
card_reviewed = _signals.signal('card-reviewed')

# Emitted after a deck reset has been committed.
# Arguments:
# - sender: the ReviewScheduler instance
# - user_id: int
# - deck_id: int
# - result: ResetResult
deck_reset = _signals.signal('deck-reset')
