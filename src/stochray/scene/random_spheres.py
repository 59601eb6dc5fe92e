"""Random spheres scene configuration.

A ground plane and three large "hero" spheres (glass, diffuse and metal) on
a line, surrounded by a grid of small spheres with randomly chosen materials:

- Ground: grey Lambertian plane through the origin facing up
- Hero spheres of radius 1 at x = 0 (glass), x = 4 (diffuse), x = -4 (metal)
- 50 random Lambertian, 10 random metal and 10 glass materials
- An n x n grid of radius 0.2 spheres, each jittered inside its cell, whose
  materials are a shuffled permutation of every registered material name.
  Only as many grid cells are filled as there are material names.

Example:
    >>> import stochray
    >>> stochray.init()
    >>> from stochray.scene.random_spheres import create_random_spheres_scene
    >>> world, camera = create_random_spheres_scene(n=10, seed=3)
    >>> pixels = camera.render(world, 400, camera.image_height(400), 16)
"""

from dataclasses import dataclass
from itertools import product

import numpy as np

from stochray.camera.thin_lens import Camera
from stochray.materials.dielectric import Dielectric
from stochray.materials.lambertian import Lambertian
from stochray.materials.metal import Metal
from stochray.scene.world import World

# Number of randomly generated materials per type
NUM_RANDOM_LAMBERTIAN = 50
NUM_RANDOM_METAL = 10
NUM_RANDOM_DIELECTRIC = 10

SMALL_SPHERE_RADIUS = 0.2
GLASS_IOR = 1.5


@dataclass
class RandomSpheresParams:
    """Parameters for the random spheres scene.

    Attributes:
        n: Grid size; up to n * n small spheres are placed.
        seed: Seed for material colors, shuffling and sphere placement.
        eye: Camera position.
        target: Camera look-at point.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Image aspect ratio.
        aperture: Lens diameter (0 for a pinhole).
    """

    n: int = 10
    seed: int | None = None
    eye: tuple[float, float, float] = (8.0, 2.0, 3.0)
    target: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0
    aspect_ratio: float = 4.0 / 3.0
    aperture: float = 0.0


def add_random_materials(world: World, rng: np.random.Generator) -> None:
    """Register the randomly generated materials.

    Lambertian albedos are products of two uniform draws per channel (biased
    toward dark colors); metal albedos lie in [0.5, 1) with fuzz in [0, 0.5).
    """
    for i in range(NUM_RANDOM_LAMBERTIAN):
        albedo = tuple(float(c) for c in rng.random(3) * rng.random(3))
        world.add_material(f"lamb{i}", Lambertian(albedo))

    for i in range(NUM_RANDOM_METAL):
        albedo = tuple(float(c) for c in 0.5 * (1.0 + rng.random(3)))
        world.add_material(f"metal{i}", Metal(albedo, fuzz=0.5 * float(rng.random())))

    for i in range(NUM_RANDOM_DIELECTRIC):
        world.add_material(f"dial{i}", Dielectric(GLASS_IOR))


def create_random_spheres_world(n: int = 10, seed: int | None = None) -> World:
    """Create the random spheres world.

    Args:
        n: Grid size for the small spheres.
        seed: Random seed; None draws fresh entropy.

    Returns:
        A World ready to render.

    Raises:
        ValueError: If n is negative.
    """
    if n < 0:
        raise ValueError(f"Grid size must be non-negative, got {n}")

    rng = np.random.default_rng(seed)
    world = World()

    world.add_material("ground", Lambertian((0.5, 0.5, 0.5)))
    world.add_plane("ground", (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), "ground")

    world.add_material("dialectic", Dielectric(GLASS_IOR))
    world.add_sphere("dialectic", (0.0, 1.0, 0.0), 1.0, "dialectic")

    world.add_material("lambertian", Lambertian((0.4, 0.2, 0.1)))
    world.add_sphere("lambertian", (4.0, 1.0, 0.0), 1.0, "lambertian")

    world.add_material("metal", Metal((0.7, 0.6, 0.5), fuzz=0.0))
    world.add_sphere("metal", (-4.0, 1.0, 0.0), 1.0, "metal")

    add_random_materials(world, rng)

    names = world.material_names()
    rng.shuffle(names)

    half = n / 2.0
    for (i, j), material_name in zip(product(range(n), range(n)), names):
        center = (
            i - half + 0.9 * float(rng.random()),
            SMALL_SPHERE_RADIUS,
            j - half + 0.9 * float(rng.random()),
        )
        world.add_sphere(f"{i},{j}", center, SMALL_SPHERE_RADIUS, material_name)

    return world


def create_random_spheres_scene(
    n: int = 10,
    seed: int | None = None,
    params: RandomSpheresParams | None = None,
) -> tuple[World, Camera]:
    """Create the random spheres world and a camera looking at it.

    Args:
        n: Grid size (ignored when ``params`` is given).
        seed: Random seed (ignored when ``params`` is given).
        params: Full scene parameters.

    Returns:
        Tuple of (world, camera).
    """
    if params is None:
        params = RandomSpheresParams(n=n, seed=seed)

    world = create_random_spheres_world(params.n, params.seed)
    camera = Camera(
        eye=params.eye,
        target=params.target,
        vfov=params.vfov,
        aspect_ratio=params.aspect_ratio,
        aperture=params.aperture,
    )
    return world, camera
