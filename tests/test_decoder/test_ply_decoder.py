"""Tests for PlyDecoder end to end."""

import numpy as np
import pytest

from plydecode.core.errors import InvalidParameterError, MissingRequiredElementError, PlyIOError
from plydecode.data_types import DataType
from plydecode.decoder import DecodePlyConfig, PlyDecoder
from plydecode.geometry import AttributeType, Mesh, PointCloud
from plydecode.ply.document import PlyDocument, PlyElement, PlyProperty
from tests.conftest import QUAD_POSITIONS, gaussian_columns, xyz_columns


class TestQuad:
    def test_point_cloud(self, quad_document):
        pc = PlyDecoder().decode_point_cloud(quad_document)
        assert type(pc) is PointCloud
        assert pc.num_points == 4
        position = pc.get_named_attribute(AttributeType.POSITION)
        assert position.num_components == 3
        assert position.data_type is DataType.FLOAT32
        assert position.size == 4
        np.testing.assert_array_equal(position.point_values(4), QUAD_POSITIONS)

    def test_mesh(self, quad_document):
        mesh = PlyDecoder().decode_mesh(quad_document)
        assert mesh.num_faces == 2
        assert mesh.face(0) == (0, 1, 2)
        assert mesh.face(1) == (0, 2, 3)
        assert mesh.num_points == 4

    def test_decode_document_returns_target(self, quad_document):
        mesh = Mesh()
        assert PlyDecoder().decode_document(quad_document, mesh) is mesh


class TestColoredPoints:
    @pytest.fixture
    def colored_document(self, make_document) -> PlyDocument:
        columns = xyz_columns(QUAD_POSITIONS.astype(np.int32))
        # Duplicate colors would collapse if deduplication ran.
        columns["red"] = np.full(4, 200, np.uint8)
        columns["green"] = np.full(4, 100, np.uint8)
        columns["blue"] = np.full(4, 50, np.uint8)
        return make_document(columns)

    def test_attributes(self, colored_document):
        pc = PlyDecoder().decode_point_cloud(colored_document)
        position = pc.get_named_attribute(AttributeType.POSITION)
        color = pc.get_named_attribute(AttributeType.COLOR)
        assert (position.data_type, position.num_components) == (DataType.INT32, 3)
        assert (color.data_type, color.num_components) == (DataType.UINT8, 3)

    def test_mesh_without_faces_skips_deduplication(self, colored_document):
        mesh = PlyDecoder().decode_mesh(colored_document)
        assert mesh.num_faces == 0
        assert mesh.num_points == 4
        color = mesh.get_named_attribute(AttributeType.COLOR)
        assert color.size == 4
        assert color.is_mapping_identity


class TestErrors:
    def test_missing_z(self, make_document):
        columns = xyz_columns(QUAD_POSITIONS)
        del columns["z"]
        pc = PointCloud()
        with pytest.raises(InvalidParameterError, match="x, y, or z property is missing"):
            PlyDecoder().decode_document(make_document(columns), pc)
        assert pc.num_attributes == 0

    def test_missing_vertex_element(self, make_document):
        with pytest.raises(InvalidParameterError, match="vertex_element is null"):
            PlyDecoder().decode_point_cloud(make_document(None, polygons=[[0, 1, 2]]))

    def test_face_without_indices(self):
        document = PlyDocument([
            PlyElement("vertex", 4, [PlyProperty.scalar(k, v) for k, v in xyz_columns(QUAD_POSITIONS).items()]),
            PlyElement("face", 1, [PlyProperty.scalar("material", np.zeros(1, np.uint8))]),
        ])
        with pytest.raises(MissingRequiredElementError, match="No faces defined"):
            PlyDecoder().decode_mesh(document)
        # Point clouds never look at faces.
        assert PlyDecoder().decode_point_cloud(document).num_points == 4

    def test_face_index_out_of_range(self, make_document):
        document = make_document(xyz_columns(QUAD_POSITIONS), polygons=[[0, 1, 9]])
        with pytest.raises(InvalidParameterError, match="Face references point 9"):
            PlyDecoder().decode_mesh(document)

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(PlyIOError):
            PlyDecoder().decode_from_file(tmp_path / "nope.ply", PointCloud())


class TestDeduplication:
    @pytest.fixture
    def shared_corner_document(self, make_document) -> PlyDocument:
        # Two triangles written with separate copies of the shared edge.
        positions = np.array(
            [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=np.float32
        )
        return make_document(xyz_columns(positions), polygons=[[0, 1, 2], [3, 4, 5]])

    def test_merges_duplicate_points(self, shared_corner_document):
        mesh = PlyDecoder().decode_mesh(shared_corner_document)
        assert mesh.num_points == 4
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2], [0, 2, 3]])
        np.testing.assert_array_equal(
            mesh.get_named_attribute(AttributeType.POSITION).point_values(4),
            [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        )

    def test_point_ids_kept_when_disabled(self, shared_corner_document):
        config = DecodePlyConfig(deduplicate_point_ids=False)
        mesh = PlyDecoder(config).decode_mesh(shared_corner_document)
        assert mesh.num_points == 6
        position = mesh.get_named_attribute(AttributeType.POSITION)
        assert position.size == 4
        np.testing.assert_array_equal(position.mapped_indices(6), [0, 1, 2, 0, 2, 3])

    def test_all_disabled(self, shared_corner_document):
        config = DecodePlyConfig(deduplicate_attribute_values=False, deduplicate_point_ids=False)
        mesh = PlyDecoder(config).decode_mesh(shared_corner_document)
        assert mesh.num_points == 6
        assert mesh.get_named_attribute(AttributeType.POSITION).size == 6
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2], [3, 4, 5]])

    def test_point_cloud_never_deduplicated(self, shared_corner_document):
        pc = PlyDecoder().decode_point_cloud(shared_corner_document)
        assert pc.num_points == 6
        assert pc.get_named_attribute(AttributeType.POSITION).size == 6


class TestSources:
    def test_file_and_buffer_agree(self, write_ply):
        path = write_ply("splat.ply", gaussian_columns(30))
        from_file = PlyDecoder().decode_from_file(path, PointCloud())
        from_buffer = PlyDecoder().decode_from_buffer(path.read_bytes(), PointCloud())
        assert from_file.num_attributes == from_buffer.num_attributes == 7
        for a, b in zip(from_file.attributes, from_buffer.attributes):
            np.testing.assert_array_equal(a.values, b.values)

    def test_ascii_mesh_file(self, write_ply):
        path = write_ply("quad.ply", xyz_columns(QUAD_POSITIONS), polygons=[[0, 1, 2, 3]], text=True)
        mesh = PlyDecoder().decode_mesh(path)
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2], [0, 2, 3]])

    def test_uint8_index_file(self, write_ply):
        path = write_ply(
            "quad_u1.ply", xyz_columns(QUAD_POSITIONS), polygons=[[0, 1, 2, 3]], index_dtype="u1"
        )
        mesh = PlyDecoder().decode_mesh(str(path))
        assert mesh.faces.dtype == np.uint32
        assert mesh.num_faces == 2

    def test_idempotent(self, gaussian_document):
        first = PlyDecoder().decode_point_cloud(gaussian_document)
        second = PlyDecoder().decode_point_cloud(gaussian_document)
        assert first.num_points == second.num_points == 50
        for a, b in zip(first.attributes, second.attributes):
            assert a.values.tobytes() == b.values.tobytes()

    def test_idempotent_mesh(self, quad_document):
        first = PlyDecoder().decode_mesh(quad_document)
        second = PlyDecoder().decode_mesh(quad_document)
        assert first.faces.tobytes() == second.faces.tobytes()
