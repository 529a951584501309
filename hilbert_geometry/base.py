class GeometryError(Exception):
    """Thrown if there's an attempt to construct a geometric object with
    numerical data that doesn't make sense for that type of object.

    """
    pass

class DimensionMismatch(GeometryError, ValueError):
    """Thrown when a linear algebra operation gets operands whose shapes
    are incompatible.

    """
    pass

class DegenerateGeometry(GeometryError):
    """Thrown when a metric computation hits a degenerate configuration,
    e.g. a chord through two coincident points or a point on the
    boundary of a convex domain.

    """
    pass
