"""Levenshtein edit distance between normalized titles.

Titles are short, so the full (len(b)+1) x (len(a)+1) table is kept rather
than a banded or two-row variant.
"""


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions or
    substitutions turning ``a`` into ``b``. Every edit costs 1."""
    # matrix[i][j]: distance between the first i chars of b and the first j chars of a
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]
    for i in range(len(b) + 1):
        matrix[i][0] = i
    for j in range(len(a) + 1):
        matrix[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i][j - 1],  # insertion
                    matrix[i - 1][j],  # deletion
                )

    return matrix[len(b)][len(a)]
