"""
Top-K class selection over a classifier score vector.
"""

from typing import List, NamedTuple, Sequence, Union

import numpy as np
import torch


class ScoreIndexPair(NamedTuple):
    score: float
    index: int


def _as_score_tensor(scores: Union[Sequence[float], np.ndarray, torch.Tensor]) -> torch.Tensor:
    if isinstance(scores, torch.Tensor):
        tensor = scores.detach().cpu()
    else:
        tensor = torch.as_tensor(np.asarray(scores))
    tensor = tensor.reshape(-1)

    # Keep float32/float64 as given so returned scores are the input values;
    # integer and half inputs are widened exactly to float64.
    if not tensor.is_floating_point() or tensor.dtype in (torch.float16, torch.bfloat16):
        tensor = tensor.to(torch.float64)
    return tensor


def select_top_k(
    scores: Union[Sequence[float], np.ndarray, torch.Tensor],
    k: int = 3
) -> List[ScoreIndexPair]:
    """
    Pick the ``k`` highest scores and their class indices.

    This is a partial selection: only the winners are ordered (descending by
    score), the rest of the vector is discarded. Order between exactly equal
    scores is unspecified.

    Args:
        scores: Score per class; position is the class id
        k: Number of classes to keep

    Returns:
        List of ``k`` ScoreIndexPair, highest score first
    """
    tensor = _as_score_tensor(scores)
    if tensor.numel() < k:
        raise ValueError(f"Need at least {k} scores, got {tensor.numel()}")

    values, indices = torch.topk(tensor, k, largest=True, sorted=True)
    return [
        ScoreIndexPair(score=float(v), index=int(i))
        for v, i in zip(values.tolist(), indices.tolist())
    ]
