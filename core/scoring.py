"""Letter scoring for a guess against the secret word.

Two passes over the guess:
  1) exact matches are marked CORRECT and their target letters consumed;
  2) remaining guess letters are PRESENT while an unconsumed instance of
     that letter is left in the target, ABSENT otherwise.

Consuming letters is what keeps repeated letters honest: a letter is
never credited more times than it occurs in the target.
"""

from collections import Counter

from core.models import WORD_LENGTH, GuessResult, LetterVerdict


def score(guess: str, target: str) -> list[LetterVerdict]:
    """Score a guess against the target word.

    Args:
        guess: Guessed word (case-insensitive)
        target: Secret word (case-insensitive)

    Returns:
        Five verdicts, one per letter position

    Raises:
        ValueError: If either word is not exactly five letters
    """
    guess = guess.upper()
    target = target.upper()
    if len(guess) != WORD_LENGTH or len(target) != WORD_LENGTH:
        raise ValueError(
            f"guess and target must have {WORD_LENGTH} letters "
            f"(got {len(guess)} and {len(target)})"
        )

    verdicts = [LetterVerdict.ABSENT] * WORD_LENGTH
    remaining: Counter[str] = Counter()

    for i, (g, t) in enumerate(zip(guess, target)):
        if g == t:
            verdicts[i] = LetterVerdict.CORRECT
        else:
            remaining[t] += 1

    for i, g in enumerate(guess):
        if verdicts[i] is LetterVerdict.CORRECT:
            continue
        if remaining[g] > 0:
            verdicts[i] = LetterVerdict.PRESENT
            remaining[g] -= 1

    return verdicts


def evaluate_guess(guess: str, target: str) -> GuessResult:
    """Score a guess and wrap it with the normalized word."""
    return GuessResult(word=guess.upper(), verdicts=score(guess, target))
