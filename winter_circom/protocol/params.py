"""Circuit parameters for the generic STARK verification template.

assemble_parameters() derives, from ProofOptions and the AIR's public-input
count, the ordered argument list the circom `Verify` template is instantiated
with. The field order of CircuitParameters *is* the template argument order;
reordering it breaks every generated circuit.

CircuitParameters.witness_shape() is the single description of the array
lengths a proof witness must have for the same circuit. Both the template
rendering here and the witness serializer read it, so the two cannot drift.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Tuple, Union

from winter_circom.errors import InvalidConfigurationError, WinterCircomIOError
from winter_circom.primitives.field import log2
from winter_circom.protocol.fri_schedule import fri_schedule
from winter_circom.protocol.options import CONTEXT_NUM_ELEMENTS, ProofOptions
from winter_circom.protocol.security import DEFAULT_SECURITY_BITS, number_of_draws

# Rows of the out-of-domain trace frame (current and next)
OOD_FRAME_ROWS = 2


# --- Parameters ---

@dataclass(frozen=True)
class CircuitParameters:
    """Ordered arguments of the `Verify` template.

    Built only by assemble_parameters(); every value follows from the proof
    options, the public-input count and the security level.
    """
    addicity: int
    ce_blowup_factor: int
    domain_offset: int
    folding_factor: int
    fri_tree_depth: Tuple[int, ...]
    grinding_factor: int
    lde_blowup_factor: int
    num_assertions: int
    num_draws: int
    num_fri_layers: int
    num_pub_coin_seed: int
    num_public_inputs: int
    num_queries: int
    num_transition_constraints: int
    trace_length: int
    trace_width: int
    tree_depth: int

    def items(self) -> List[Tuple[str, Union[int, Tuple[int, ...]]]]:
        """(name, value) pairs in template argument order."""
        return [(f.name, getattr(self, f.name)) for f in fields(self)]

    @property
    def remainder_size(self) -> int:
        """Size of the FRI remainder after the last folding round."""
        return self.trace_length * self.lde_blowup_factor // self.folding_factor ** self.num_fri_layers

    def witness_shape(self) -> "WitnessShape":
        return WitnessShape(
            num_pub_coin_seed=self.num_pub_coin_seed,
            trace_width=self.trace_width,
            ce_blowup_factor=self.ce_blowup_factor,
            num_queries=self.num_queries,
            tree_depth=self.tree_depth,
            folding_factor=self.folding_factor,
            fri_layer_depths=tuple(self.fri_tree_depth[:self.num_fri_layers]),
            remainder_size=self.remainder_size,
        )


@dataclass(frozen=True)
class WitnessShape:
    """Array-length profile of a proof witness for one set of circuit parameters."""
    num_pub_coin_seed: int
    trace_width: int
    ce_blowup_factor: int
    num_queries: int
    tree_depth: int
    folding_factor: int
    fri_layer_depths: Tuple[int, ...]
    remainder_size: int

    @property
    def num_fri_layers(self) -> int:
        return len(self.fri_layer_depths)

    def expected(self) -> dict:
        """Expected shape of every witness array, keyed by witness field name.

        A shape is a tuple of lengths, outermost first; FRI paths differ per
        layer, so fri_layer_proofs lists one (queries, depth) pair per layer.
        """
        return {
            "pub_coin_seed": (self.num_pub_coin_seed,),
            "fri_commitments": (self.num_fri_layers,),
            "ood_trace_frame": (OOD_FRAME_ROWS, self.trace_width),
            "ood_frame_constraint_evaluation": (self.ce_blowup_factor,),
            "query_positions": (self.num_queries,),
            "trace_evaluations": (self.num_queries, self.trace_width),
            "trace_query_proofs": (self.num_queries, self.tree_depth),
            "constraint_evaluations": (self.num_queries, self.ce_blowup_factor),
            "constraint_query_proofs": (self.num_queries, self.tree_depth),
            "fri_layer_queries": (self.num_fri_layers, self.num_queries, self.folding_factor),
            "fri_layer_proofs": tuple((self.num_queries, depth) for depth in self.fri_layer_depths),
            "fri_remainder": (self.remainder_size,),
        }


def assemble_parameters(
    options: ProofOptions,
    num_public_inputs: int,
    security_bits: int = DEFAULT_SECURITY_BITS,
) -> CircuitParameters:
    """Derive the circuit parameters for a proof configuration."""
    if num_public_inputs < 0:
        raise InvalidConfigurationError(f"number of public inputs must be >= 0, got {num_public_inputs}")

    schedule = fri_schedule(
        options.trace_length,
        options.blowup_factor,
        options.folding_factor,
        options.max_remainder_size,
    )
    air_context = options.air_context()
    query_domain_size = options.trace_length * options.folding_factor

    return CircuitParameters(
        addicity=options.base_field.two_adicity,
        ce_blowup_factor=air_context.ce_domain_size // options.trace_length,
        domain_offset=options.base_field.generator,
        folding_factor=options.folding_factor,
        fri_tree_depth=schedule.circuit_depths,
        grinding_factor=options.grinding_factor,
        lde_blowup_factor=options.blowup_factor,
        num_assertions=options.num_assertions,
        num_draws=number_of_draws(options.num_queries, query_domain_size, security_bits),
        num_fri_layers=schedule.num_layers,
        num_pub_coin_seed=num_public_inputs + CONTEXT_NUM_ELEMENTS,
        num_public_inputs=num_public_inputs,
        num_queries=options.num_queries,
        num_transition_constraints=air_context.num_transition_constraints,
        trace_length=options.trace_length,
        trace_width=options.trace_width,
        tree_depth=log2(query_domain_size),
    )


# --- Template Rendering ---

def _format_value(value: Union[int, Tuple[int, ...]]) -> str:
    if isinstance(value, tuple):
        return "[" + ", ".join(str(v) for v in value) + "]"
    return str(value)


def render_arguments(params: CircuitParameters) -> str:
    """Decimal template arguments, one per line, each tagged with its name."""
    items = params.items()
    lines = []
    for i, (name, value) in enumerate(items):
        separator = "," if i < len(items) - 1 else ""
        lines.append(f"{_format_value(value)}{separator} // {name}")
    return "\n    ".join(lines)


def render_circom_main(circuit_name: str, params: CircuitParameters) -> str:
    """Source of the circom main file binding the template to params."""
    return (
        "pragma circom 2.0.0;\n"
        "\n"
        "include \"../../../circuits/verify.circom\";\n"
        f"include \"../../../circuits/air/{circuit_name}.circom\";\n"
        "\n"
        "component main {public [ood_frame_constraint_evaluation, ood_trace_frame]} = Verify(\n"
        f"    {render_arguments(params)}\n"
        ");\n"
    )


def write_circom_main(path: Union[str, Path], circuit_name: str, params: CircuitParameters) -> None:
    """Write the rendered main file to path."""
    contents = render_circom_main(circuit_name, params)
    try:
        with open(path, "w") as f:
            f.write(contents)
    except OSError as e:
        raise WinterCircomIOError(e, "writing circom main file") from e
