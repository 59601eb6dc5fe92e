"""Device-side primitive storage and the nearest-hit scan.

Primitives live in Taichi fields in Structure-of-Arrays layout, one set per
primitive type. Each primitive carries the integer id of its material,
resolved from the material name by ``World.build()``; kernels never see
material names.

``nearest_hit`` tests every sphere and then every plane, shrinking the upper
bound of the search interval to the closest distance found so far. A later
primitive replaces the current winner only when it is strictly closer, so the
scan order decides nothing except exact ties.

Example:
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> add_plane((0.0, -0.5, 0.0), (0.0, 1.0, 0.0), material_id=1)
    >>> # Inside a kernel:
    >>> # rec = nearest_hit(ray, 0.001, 1e30)
"""

import taichi as ti

from stochray.core.ray import Ray
from stochray.core.vector import real, vec3
from stochray.geometry.plane import Plane, hit_plane
from stochray.geometry.sphere import HitRecord, Sphere, hit_sphere


@ti.dataclass
class CollisionRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any primitive, 0 otherwise.
        distance: Ray parameter of the nearest intersection.
        point: The nearest intersection point.
        normal: The primitive's unit surface normal at the point.
        material_id: The resolved material id of the hit primitive,
            -1 on a miss.
    """

    hit: ti.i32
    distance: real
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 64

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=real, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=real, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the device-side scene.

    Resets the primitive counts to zero. The field data is overwritten when
    new primitives are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0


def add_sphere(center, radius: float, material_id: int) -> int:
    """Append a sphere to the device-side scene.

    Args:
        center: The center point as (x, y, z).
        radius: The radius of the sphere.
        material_id: Resolved material id.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_plane(point, normal, material_id: int) -> int:
    """Append a plane to the device-side scene.

    Args:
        point: A point on the plane as (x, y, z).
        normal: The unit plane normal as (x, y, z).
        material_id: Resolved material id.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_points[idx] = vec3(point[0], point[1], point[2])
    plane_normals[idx] = vec3(normal[0], normal[1], normal[2])
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres on the device."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes on the device."""
    return int(num_planes[None])


@ti.func
def _to_collision(rec: HitRecord, material_id: ti.i32) -> CollisionRecord:
    return CollisionRecord(
        hit=rec.hit,
        distance=rec.distance,
        point=rec.point,
        normal=rec.normal,
        material_id=material_id,
    )


@ti.func
def _make_no_collision() -> CollisionRecord:
    return CollisionRecord(
        hit=0,
        distance=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def nearest_hit(ray: Ray, t_min: real, t_max: real) -> CollisionRecord:
    """Find the closest primitive hit by a ray.

    Args:
        ray: The ray to trace.
        t_min: Exclusive lower bound on hit distances.
        t_max: Exclusive upper bound on hit distances.

    Returns:
        A CollisionRecord for the primitive with the strictly smallest
        distance inside (t_min, t_max), or a record with hit == 0.
    """
    closest = t_max
    result = _make_no_collision()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest)
        if rec.hit == 1:
            closest = rec.distance
            result = _to_collision(rec, sphere_material_ids[i])

    for i in range(num_planes[None]):
        plane = Plane(point=plane_points[i], normal=plane_normals[i])
        rec = hit_plane(ray, plane, t_min, closest)
        if rec.hit == 1:
            closest = rec.distance
            result = _to_collision(rec, plane_material_ids[i])

    return result
