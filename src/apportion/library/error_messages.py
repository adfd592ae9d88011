"""
Error message templates for weighted value distribution.

Messages follow WHAT/CAUSE/FIX structure.
"""

from __future__ import annotations

from difflib import get_close_matches

ERROR_MESSAGES = {
    "empty_vector": """
Empty {vector_name} provided.

WHAT HAPPENED:
  The {vector_name} has length zero.

LIKELY CAUSE:
  - The buffer was allocated with a computed length that came out as zero
  - Filtering upstream removed every slot

HOW TO FIX:
  Distribute into a buffer with at least one slot:
  >>> target = np.zeros(5, dtype=np.int64)
""",
    "shape_mismatch": """
Weight and target lengths do not match.

WHAT HAPPENED:
  Got {weight_count} weights for {target_count} target slots.
  Weights and target slots are paired index by index.

LIKELY CAUSE:
  The weight vector was built for a different buffer, or a policy
  assumed a different grid shape.

HOW TO FIX:
  Provide exactly one weight per target slot:
  >>> assert len(weights) == len(target)
""",
    "not_one_dimensional": """
{vector_name} must be one-dimensional.

WHAT HAPPENED:
  Got an array with shape {shape}.

HOW TO FIX:
  Flatten grids before distributing and reshape afterwards:
  >>> flat = target.reshape(-1)
""",
    "non_finite_weight": """
Infinite weight reached normalization.

WHAT HAPPENED:
  Found {count} infinite weight(s), first at index {index}.
  No finite substitute exists, so nothing was distributed.

LIKELY CAUSE:
  - A weight policy divided by zero or overflowed
  - A custom sampler emitted inf

HOW TO FIX:
  Check the policies applied to the weights, in order:
  >>> print(weights[~np.isfinite(weights)])
""",
    "weight_sum_overflow": """
Weight sum is not finite.

WHAT HAPPENED:
  Every weight is finite, but their sum overflowed to {total}.

HOW TO FIX:
  Rescale the weights, only their ratios matter:
  >>> weights /= np.abs(weights).max()
""",
    "unresolvable_weights": """
Weights sum to zero with both signs present.

WHAT HAPPENED:
  {detail}

LIKELY CAUSE:
  Positive and negative weights cancel exactly, so shares cannot be
  computed as weight / sum.

HOW TO FIX:
  1. Shift weights so they share a sign (e.g. WeightRangeMapping)
  2. Or use the 'epsilon' zero-sum strategy to accept the heuristic
  3. Or raise max_attempts when resampling random weights
""",
    "unsupported_numeric_kind": """
Target numeric kind '{kind}' is not supported.

WHAT HAPPENED:
  {detail}

WHY:
  Remainder correction may decrement a slot below zero, which assumes
  signed two's-complement integers of at least 32 bits, or real/decimal
  arithmetic.

HOW TO FIX:
  {suggestion}

  Supported kinds: {supported}
""",
    "value_overflow": """
Value {value} does not fit {kind}.

WHAT HAPPENED:
  The value to distribute lies outside [{minimum}, {maximum}].

HOW TO FIX:
  Distribute into a wider kind (e.g. int64) or split the value.
""",
    "share_overflow": """
Computed share does not fit {kind}.

WHAT HAPPENED:
  Slot {index} would receive {share}, outside the representable range.

LIKELY CAUSE:
  - Mixed-sign weights with a near-zero sum amplify shares
  - The value is close to the kind's limit

HOW TO FIX:
  Use a wider kind, or weights that do not nearly cancel.
""",
    "precision_loss": """
Shares of {value} lost the value in {kind} rounding.

WHAT HAPPENED:
  After correcting the rounding drift in slot {index}, the shares still
  miss the value by {residual}. The target was left unchanged.

LIKELY CAUSE:
  Mixed-sign weights that cancel exactly were divided by the epsilon
  weight sum, so every share dwarfs the value.

HOW TO FIX:
  Use the 'raise' zero-sum strategy, or weights that share a sign.
""",
    "accumulation_overflow": """
Accumulated target value does not fit {kind}.

WHAT HAPPENED:
  Adding the new share to slot {index} would overflow. The target was
  left unchanged.

HOW TO FIX:
  Distribute into a wider kind, or reset the buffer between calls.
""",
    "invalid_noise_dimensions": """
Invalid noise sampling dimensions.

WHAT HAPPENED:
  {detail}

HOW TO FIX:
  The x dimension must be >= 1 and the buffer must hold at least
  x * max(1, y) * max(1, z) weights:
  >>> sampler.set_dimensions(7, 7)
""",
    "invalid_policy": """
Weight policy '{name}' not recognized.

WHAT HAPPENED:
  The requested policy is not registered.

HOW TO FIX:
  {suggestion}
""",
    "invalid_zero_sum_strategy": """
Zero-sum strategy '{name}' not recognized.

HOW TO FIX:
  {suggestion}
""",
    "invalid_numeric_kind": """
Numeric kind '{name}' not recognized.

HOW TO FIX:
  {suggestion}
""",
    "config_not_found": """
Distributor configuration file not found.

WHAT HAPPENED:
  No file exists at: {path}

HOW TO FIX:
  Check the path, or omit --config to use the default white-noise setup.
""",
    "invalid_config": """
Distributor configuration is invalid.

WHAT HAPPENED:
  {path} could not be loaded:
  {detail}

HOW TO FIX:
  A minimal configuration looks like:
  >>> sampler:
  >>>   type: coherent
  >>>   seed: 42
  >>>   dimensions: [7, 7]
  >>> policies:
  >>>   - type: range_mapping
  >>>     to_lower: 0.6
  >>>     to_upper: 1.0
""",
}


def format_error(key: str, **kwargs) -> str:
    """
    Format an error message with the given parameters.

    Parameters
    ----------
    key
        The error message key from ERROR_MESSAGES
    **kwargs
        Parameters to format into the message template

    Returns
    -------
    str
        The formatted error message
    """
    template = ERROR_MESSAGES.get(key)
    if template is None:
        return f"Unknown error: {key}"
    return template.format(**kwargs).strip()


def suggest_similar(
    value: str, valid_options: list[str], max_suggestions: int = 3
) -> str:
    """
    Suggest similar valid options for typos.

    Parameters
    ----------
    value
        The invalid value that was provided
    valid_options
        List of valid options to match against
    max_suggestions
        Maximum number of suggestions to return (default: 3)

    Returns
    -------
    str
        A formatted suggestion message
    """
    matches = get_close_matches(value, valid_options, n=max_suggestions, cutoff=0.6)
    if matches:
        return f"Did you mean: {', '.join(matches)}?"
    return f"Valid options: {', '.join(valid_options)}"
