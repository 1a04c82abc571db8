# hexmesher

`hexmesher` is a library for building and editing hexahedral meshes. Each
element of the mesh is a node in a directed acyclic graph of operations
(extrude, refine, delete). Edits are actions that a `Commander` applies, and
it can undo and redo them. The library can also project the surface of a
hexahedral mesh onto a target polygon surface.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

The only runtime dependency is `numpy`.

## Modules

- `hexmesher.dag`: the graph. It has `Node`, `Element` (eight vertex ids and a
  `pid`), `Operation`, `Extrude`, `Refine` and `Delete`, plus the enums
  `NodeType`, `Primitive` and `ExtrudeSource`. A node's `parents` and
  `children` are `NodeSet`s, and they keep links symmetric.
  `NodeSet.detach` and `NodeSet.detach_all` can also unlink nodes that are left
  with no links and no handles.
- `hexmesher.dag_utils`:
  - `descendants` traverses breadth-first.
  - `clone` copies a single node.
  - `serialize` flattens a graph into a list of plain values.
  - `deserialize` rebuilds a graph from such a list.
- `hexmesher.meshing.hexmesh`:
  - `HexMesh` is a hexahedral mesh with vertex, edge, face and polyhedron
    adjacency, per-polyhedron hiding, and `truncate`.
  - `PolygonMesh` is a surface mesh with vertex normals.
  - `HexMesh.export_surface` returns the visible boundary as a `PolygonMesh`,
    together with the vertex maps between the two meshes.
- `hexmesher.meshing.mesh_utils`: index conventions for hexahedra, such as face
  and edge vertex orders, `align`, `reverse`, `rotate`, `fi`, `ei` and `vi`. It
  also has topological queries, geometric helpers, and `add_tree`, which adds
  the elements under a graph node to a mesher.
- `hexmesher.meshing.mesher`:
  - `Mesher` keeps a `HexMesh` in step with graph elements. It can show or
    hide polyhedra.
  - `Mesher.state()` returns a snapshot of the mesh as a `MesherState`, and
    `Mesher.restore` rolls the mesh back to one.
  - `Mesher.pick` casts a ray (or a line, with `allow_behind`) at the visible
    faces. It returns a `PickResult` or `None`.
  - Callbacks can be appended to `on_updated`, `on_added`, `on_restored` and
    `on_element_visibility_changed`.
- `hexmesher.project`: `Project` holds a `Mesher`, the root element
  (`root_element`) and a `Commander`.
- `hexmesher.commander`:
  - `Action` is the base class for edits.
  - `ActionStack` is a bounded stack with a `limit` of 1000 by default. When a
    stack goes over its limit, the oldest actions are dropped.
  - `Commander` applies actions and has `undo`, `redo`, `can_undo` and
    `can_redo`. Applying a new action clears the redo stack.
- `hexmesher.actions`: the edits.
  - `delete.Delete` and `delete.DeleteSome` hide elements.
  - `root.Root` replaces the graph and the vertices.
  - `extrude.Extrude` extrudes a new hexahedron from one, two or three faces.
    The geometry is in `extrude_utils`.
  - `fit_circle.FitCircle` spreads at least three vertices evenly around their
    best-fit circle.
  - `transform.Transform` applies a 4x4 matrix to some or all vertices.
  - `smoothing.Smooth` does Laplacian smoothing.
  - `pad.Pad` shrinks the mesh and wraps its visible surface in a layer of
    hexahedra.
  - `projecting.ProjectAction` projects the mesh onto a target surface.
- `hexmesher.projection`:
  - `projector.project` is the projection pipeline, configured by `Options`,
    `BaseWeightMode`, `DisplaceMode` and `JacobianCheckMode`.
  - `features` has feature points and paths (`Point`, `EidsPath`, `VidsPath`),
    `SurfaceExporter` and `Tweak`.
  - `match` does closest-point matching.
  - `fill` fills in positions that were left unset.
  - `smooth` has surface, path and interior smoothing.
  - `percentile.percentile_advance` caps how far vertices move in one step.
  - `jacobian.jacobian_advance` pulls vertices back so that no hexahedron is
    left with a negative scaled Jacobian.

## Example

```python
from hexmesher.project import Project
from hexmesher.dag import Element
from hexmesher.actions.root import Root
from hexmesher.actions.extrude import Extrude

project = Project()

cube = Element(vids=[0, 1, 2, 3, 4, 5, 6, 7])
verts = [
    (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
    (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1),
]

commander = project.commander()
commander.apply(Root(cube, verts))
commander.apply(Extrude([cube], [0], 0, False))

print(project.mesher().mesh().num_polys())   # 2
commander.undo()
print(project.mesher().mesh().num_polys())   # 1
commander.redo()
```

A graph can be turned into plain values and rebuilt from them:

```python
from hexmesher.dag_utils import serialize, deserialize

values = serialize(cube)
copy_of_root = deserialize(values)
```

## What the package does not do

- The `Refine` node can be stored, cloned and serialized. However, no action
  applies refinement schemes to the mesh.
- There are no actions for subdividing, splitting along a plane, making the
  mesh conforming, or pasting copied subgraphs.
- There is no viewer or user interface, and there is no command-line program.
- `serialize` produces a list of values in memory. Reading and writing project
  files is left to the caller.