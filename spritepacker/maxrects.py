import enum
from typing import List, Tuple


class Rectangle:
    """Represents a rectangle with width, height, and position (x, y)."""
    def __init__(self, x: int = 0, y: int = 0, width: int = 0, height: int = 0):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def __repr__(self):
        return f"Rectangle({self.width}×{self.height} at ({self.x},{self.y}))"

    def __eq__(self, other):
        if not isinstance(other, Rectangle):
            return NotImplemented
        return (self.x, self.y, self.width, self.height) == (other.x, other.y, other.width, other.height)

    def copy(self) -> 'Rectangle':
        return Rectangle(self.x, self.y, self.width, self.height)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        """A zero-sized rect means 'not placed'."""
        return self.width <= 0 or self.height <= 0

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another."""
        return not (
            self.right <= other.x or
            self.bottom <= other.y or
            self.x >= other.right or
            self.y >= other.bottom
        )

    def contains(self, other: 'Rectangle') -> bool:
        """Check if the other rectangle lies completely inside this one."""
        return (other.x >= self.x and other.y >= self.y and
                other.right <= self.right and other.bottom <= self.bottom)

    def area(self) -> int:
        """Get the area of the rectangle."""
        return self.width * self.height


class HeuristicType(enum.Enum):
    """Enum for placement heuristics."""
    BEST_SHORT_SIDE_FIT = 1  # Minimize the shorter leftover side
    BEST_LONG_SIDE_FIT = 2   # Minimize the longer leftover side
    BEST_AREA_FIT = 3        # Minimize the total area of leftover space
    BOTTOM_LEFT = 4          # Place at the bottom-left most position
    CONTACT_POINT = 5        # Maximize edge contact with placed rects and bin edges


def _common_interval_length(start1: int, end1: int, start2: int, end2: int) -> int:
    """Length of the overlap of two 1D intervals, 0 if they are disjoint."""
    if end1 < start2 or end2 < start1:
        return 0
    return min(end1, end2) - max(start1, start2)


class MaxRectsBin:
    """Maximal Rectangles bin for a single sheet.

    Holds the free rectangle list for one packing run. Call init() (or make a
    new bin) before packing a different sheet.
    """

    def __init__(self, width: int = 0, height: int = 0, allow_rotation: bool = False):
        self.init(width, height, allow_rotation)

    def init(self, width: int, height: int, allow_rotation: bool = False):
        """Reset the bin to an empty sheet of the given size."""
        self.width = width
        self.height = height
        self.allow_rotation = allow_rotation
        # Start with the entire sheet as a free rectangle
        self.free_rects = [Rectangle(0, 0, width, height)] if width > 0 and height > 0 else []
        self.used_rects = []

    def insert(self, width: int, height: int,
               heuristic: HeuristicType = HeuristicType.BEST_AREA_FIT) -> Rectangle:
        """Insert a box of the given size.

        Returns the placed rectangle, with width and height swapped if the bin
        rotated it, or a zero-sized rectangle if it could not fit.
        """
        if width <= 0 or height <= 0:
            return Rectangle()

        node = self._find_position(width, height, heuristic)
        if node.height == 0:
            return node

        self._split_free_rectangles(node)
        self._prune_free_rectangles()
        self.used_rects.append(node)
        return node.copy()

    def occupancy(self) -> float:
        """Ratio of used surface area to the bin area."""
        if self.width <= 0 or self.height <= 0:
            return 0.0
        used = sum(rect.area() for rect in self.used_rects)
        return used / (self.width * self.height)

    def _find_position(self, width: int, height: int, heuristic: HeuristicType) -> Rectangle:
        best_score: Tuple[float, float] = (float('inf'), float('inf'))
        best_node = Rectangle()

        orientations = [(width, height)]
        # No need to check rotation for squares
        if self.allow_rotation and width != height:
            orientations.append((height, width))

        for rect in self.free_rects:
            for w, h in orientations:
                if rect.width >= w and rect.height >= h:
                    score = self._calculate_score(rect, w, h, heuristic)
                    if score < best_score:
                        best_score = score
                        best_node = Rectangle(rect.x, rect.y, w, h)

        return best_node

    def _calculate_score(self, free_rect: Rectangle, width: int, height: int,
                         heuristic: HeuristicType) -> Tuple[float, float]:
        """Calculate the (primary, secondary) score; lower is better."""
        leftover_width = free_rect.width - width
        leftover_height = free_rect.height - height
        short_side = min(leftover_width, leftover_height)
        long_side = max(leftover_width, leftover_height)

        if heuristic == HeuristicType.BEST_SHORT_SIDE_FIT:
            return short_side, long_side

        elif heuristic == HeuristicType.BEST_LONG_SIDE_FIT:
            return long_side, short_side

        elif heuristic == HeuristicType.BEST_AREA_FIT:
            return free_rect.width * free_rect.height - width * height, short_side

        elif heuristic == HeuristicType.BOTTOM_LEFT:
            # Lowest resulting top edge (y grows downwards), then leftmost
            return free_rect.y + height, free_rect.x

        elif heuristic == HeuristicType.CONTACT_POINT:
            # Higher contact is better, so negate it for the min comparison
            return -self._contact_point_score(free_rect.x, free_rect.y, width, height), 0

        return short_side, long_side

    def _contact_point_score(self, x: int, y: int, width: int, height: int) -> int:
        score = 0
        if x == 0 or x + width == self.width:
            score += height
        if y == 0 or y + height == self.height:
            score += width

        for used in self.used_rects:
            if used.x == x + width or used.right == x:
                score += _common_interval_length(used.y, used.bottom, y, y + height)
            if used.y == y + height or used.bottom == y:
                score += _common_interval_length(used.x, used.right, x, x + width)
        return score

    def _split_free_rectangles(self, inserted_rect: Rectangle):
        """Split all free rectangles that overlap with the inserted rectangle."""
        new_free_rects: List[Rectangle] = []

        for free_rect in self.free_rects:
            if not inserted_rect.intersects(free_rect):
                new_free_rects.append(free_rect)
                continue

            if inserted_rect.x < free_rect.right and inserted_rect.right > free_rect.x:
                # New rectangle above the inserted rect
                if inserted_rect.y > free_rect.y:
                    new_free_rects.append(Rectangle(
                        free_rect.x,
                        free_rect.y,
                        free_rect.width,
                        inserted_rect.y - free_rect.y
                    ))

                # New rectangle below the inserted rect
                if inserted_rect.bottom < free_rect.bottom:
                    new_free_rects.append(Rectangle(
                        free_rect.x,
                        inserted_rect.bottom,
                        free_rect.width,
                        free_rect.bottom - inserted_rect.bottom
                    ))

            if inserted_rect.y < free_rect.bottom and inserted_rect.bottom > free_rect.y:
                # New rectangle to the left of the inserted rect
                if inserted_rect.x > free_rect.x:
                    new_free_rects.append(Rectangle(
                        free_rect.x,
                        free_rect.y,
                        inserted_rect.x - free_rect.x,
                        free_rect.height
                    ))

                # New rectangle to the right of the inserted rect
                if inserted_rect.right < free_rect.right:
                    new_free_rects.append(Rectangle(
                        inserted_rect.right,
                        free_rect.y,
                        free_rect.right - inserted_rect.right,
                        free_rect.height
                    ))

        self.free_rects = new_free_rects

    def _prune_free_rectangles(self):
        """Remove redundant free rectangles (those completely contained within others)."""
        i = 0
        while i < len(self.free_rects):
            j = i + 1
            while j < len(self.free_rects):
                if self.free_rects[j].contains(self.free_rects[i]):
                    # Remove rect i
                    self.free_rects.pop(i)
                    i -= 1
                    break
                elif self.free_rects[i].contains(self.free_rects[j]):
                    # Remove rect j
                    self.free_rects.pop(j)
                else:
                    j += 1
            i += 1
