"""Unit tests for the metal material."""

import pytest
import taichi as ti


class TestScatterMetal:
    def test_perfect_mirror(self):
        """Zero fuzz reflects exactly, with unit length."""
        from mcray.materials.metal import scatter_metal, vec3

        direction_out = ti.Vector.field(3, dtype=ti.f32, shape=())
        attenuation_out = ti.Vector.field(3, dtype=ti.f32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                direction, attenuation, did_scatter = scatter_metal(
                    vec3(0.9, 0.8, 0.7), 0.0, vec3(2.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                direction_out[None] = direction
                attenuation_out[None] = attenuation
                scattered[None] = did_scatter

        test_kernel()
        d = direction_out[None]
        s = 0.5**0.5
        assert (d[0], d[1], d[2]) == pytest.approx((s, s, 0.0), abs=1e-5)
        a = attenuation_out[None]
        assert (a[0], a[1], a[2]) == pytest.approx((0.9, 0.8, 0.7))
        assert scattered[None] == 1

    def test_reflection_into_surface_is_absorbed(self):
        """A reflected direction below the surface reports no scatter."""
        from mcray.materials.metal import scatter_metal, vec3

        direction_out = ti.Vector.field(3, dtype=ti.f32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _i in range(1):
                direction, _attenuation, did_scatter = scatter_metal(
                    vec3(0.5, 0.5, 0.5), 0.0, vec3(0.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                direction_out[None] = direction
                scattered[None] = did_scatter

        test_kernel()
        assert scattered[None] == 0
        # Direction is still reported
        assert direction_out[None][1] == pytest.approx(-1.0, abs=1e-5)

    def test_fuzz_perturbs_within_radius(self):
        from mcray.materials.metal import scatter_metal, vec3

        n = 1000
        offsets = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                direction, _, _ = scatter_metal(
                    vec3(0.5, 0.5, 0.5), 0.3, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offsets[i] = ti.math.length(direction - vec3(0.0, 1.0, 0.0))

        test_kernel()
        values = offsets.to_numpy()
        assert values.max() <= 0.3 + 1e-5
        assert values.min() >= 0.3 - 1e-5


class TestMetalRegistry:
    def test_add_and_lookup(self):
        from mcray.materials.metal import (
            add_metal_material,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.7, 0.6, 0.5), fuzz=0.25)
        assert idx == 0
        assert get_metal_material_count() == 1

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[None] = get_metal_fuzz(i)

        test_kernel(idx)
        assert result[None] == pytest.approx(0.25)

    def test_fuzz_clamped_to_one(self):
        from mcray.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.7, 0.6, 0.5), fuzz=3.0)
        assert metal_fuzzes[idx] == pytest.approx(1.0)

    def test_negative_fuzz_rejected(self):
        from mcray.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.7, 0.6, 0.5), fuzz=-0.1)

    def test_invalid_albedo(self):
        from mcray.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.7, 1.6, 0.5))

    def test_clamp_fuzz(self):
        from mcray.materials.metal import clamp_fuzz

        assert clamp_fuzz(0.4) == 0.4
        assert clamp_fuzz(1.5) == 1.0
        with pytest.raises(ValueError):
            clamp_fuzz(-1.0)
