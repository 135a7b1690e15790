"""
Explicit deployment ordering of the estate's stacks.

Stacks never hold references to each other. A consumer reads a parameter
family that a producer published in an earlier deployment. Each stack is
registered here with the families it reads and produces, and the plan
derives a deployment order from those edges. A consumer can then only be
synthesized after its producers, and a selection of stacks can be checked
against the parameters already live in the account.
"""

import heapq
import logging
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from aws_cdk import Stack
from constructs import Construct

from stacks.common.environment import ApplicationEnvironment
from stacks.common.exceptions import DeploymentOrderError, MissingContractError
from stacks.contracts import PROBE_KEYS, ParameterContractStore, ParameterFamily

logger = logging.getLogger(__name__)

StackFactory = Callable[[Construct], Stack]


@dataclass(frozen=True)
class StackNode:
    """
    One deployable stack of the estate.

    Attributes:
        name: Short name used to select the stack, e.g. ``service``
        factory: Builds the stack in the given scope
        reads: Parameter families the stack loads
        produces: Parameter families the stack publishes
        region: Region the stack is pinned to, if not the default one
    """

    name: str
    factory: StackFactory
    reads: FrozenSet[ParameterFamily] = frozenset()
    produces: FrozenSet[ParameterFamily] = frozenset()
    region: Optional[str] = None


class DeploymentPlan:
    """Stack nodes and the producer/consumer edges between them."""

    def __init__(self) -> None:
        self._nodes: Dict[str, StackNode] = {}
        self._producers: Dict[ParameterFamily, str] = {}

    @property
    def nodes(self) -> List[StackNode]:
        return list(self._nodes.values())

    def add(self, node: StackNode) -> "DeploymentPlan":
        """
        Register a stack.

        Raises:
            DeploymentOrderError: If the name is taken or another stack
                already produces one of the node's families
        """
        if node.name in self._nodes:
            raise DeploymentOrderError(
                f"Stack '{node.name}' is registered twice",
                stack_names=[node.name]
            )
        for family in node.produces:
            if family in self._producers:
                raise DeploymentOrderError(
                    f"Parameter family '{family.value}' is produced by both "
                    f"'{self._producers[family]}' and '{node.name}'",
                    stack_names=[self._producers[family], node.name]
                )

        self._nodes[node.name] = node
        for family in node.produces:
            self._producers[family] = node.name
        return self

    def producer_of(self, family: ParameterFamily) -> str:
        """
        Name of the stack publishing a family.

        Raises:
            DeploymentOrderError: If no registered stack produces it
        """
        if family not in self._producers:
            readers = sorted(name for name, node in self._nodes.items() if family in node.reads)
            raise DeploymentOrderError(
                f"No stack produces parameter family '{family.value}'",
                stack_names=readers
            )
        return self._producers[family]

    def _dependencies(self, node: StackNode) -> List[str]:
        producers = {self.producer_of(family) for family in node.reads}
        producers.discard(node.name)
        return sorted(producers, key=self._registration_index)

    def _registration_index(self, name: str) -> int:
        return list(self._nodes).index(name)

    def _resolve_selection(self, selected: Optional[Iterable[str]]) -> List[str]:
        if selected is None:
            return list(self._nodes)

        names = list(selected)
        unknown = [name for name in names if name not in self._nodes]
        if unknown:
            raise DeploymentOrderError(
                f"Unknown stacks selected: {', '.join(unknown)}. "
                f"Known stacks: {', '.join(self._nodes)}",
                stack_names=unknown
            )
        return names

    def order(self, selected: Optional[Iterable[str]] = None) -> List[StackNode]:
        """
        Deployment order of the plan, or of a selection of it.

        Producers come before their consumers. Among the stacks whose
        producers are all placed, the earliest registered goes next, so
        registration order is kept wherever the edges allow and the result
        is the same on every run. A selection is ordered as part of the
        whole plan.

        Raises:
            DeploymentOrderError: On an unknown selected stack, a family
                without producer, or a cycle
        """
        selection = set(self._resolve_selection(selected))

        sorter = TopologicalSorter()
        for name, node in self._nodes.items():
            sorter.add(name, *self._dependencies(node))

        try:
            sorter.prepare()
        except CycleError as e:
            cycle = list(e.args[1])
            raise DeploymentOrderError(
                f"Stacks depend on each other in a cycle: {' -> '.join(cycle)}",
                stack_names=cycle
            ) from e

        ordered = []
        ready = []
        while sorter.is_active():
            for name in sorter.get_ready():
                heapq.heappush(ready, (self._registration_index(name), name))
            _, name = heapq.heappop(ready)
            ordered.append(name)
            sorter.done(name)

        result = [self._nodes[name] for name in ordered if name in selection]
        logger.info(f"Deployment order: {' -> '.join(node.name for node in result)}")
        return result

    def external_reads(self, selected: Optional[Iterable[str]] = None) -> Dict[ParameterFamily, str]:
        """
        Families the selection reads from stacks outside of it.

        Those producers must already be deployed for the selection to
        synthesize against real values.

        Returns:
            Each external family mapped to the name of its producer
        """
        selection = self._resolve_selection(selected)
        external = {}
        for name in selection:
            for family in sorted(self._nodes[name].reads, key=lambda f: f.value):
                producer = self.producer_of(family)
                if producer not in selection:
                    external[family] = producer
        return external

    def verify_contracts(self,
                         store: ParameterContractStore,
                         env: ApplicationEnvironment,
                         selected: Optional[Iterable[str]] = None,
                         regional_stores: Optional[Dict[str, ParameterContractStore]] = None) -> None:
        """
        Check that every external producer of the selection has published.

        One probe key per family is looked up through the store. Families
        without a probe key are ordering-only and are not checked. A
        producer pinned to a region is probed through the store of that
        region in ``regional_stores`` when there is one.

        Raises:
            MissingContractError: Naming the first producer that has not
                been deployed
        """
        for family, producer in self.external_reads(selected).items():
            probe_key = PROBE_KEYS.get(family)
            if probe_key is None:
                logger.debug(f"Family '{family.value}' has no probe key, skipping")
                continue

            producer_store = store
            region = self._nodes[producer].region
            if regional_stores and region in regional_stores:
                producer_store = regional_stores[region]

            if not producer_store.exists(family, env, probe_key):
                parameter_name = producer_store.parameter_name(family, env, probe_key)
                raise MissingContractError(
                    f"Parameter '{parameter_name}' not found. "
                    f"Deploy '{producer}' before the selected stacks",
                    parameter_name=parameter_name
                )
            logger.info(f"Contract '{family.value}' of '{producer}' is published for {env}")

    def synthesize(self, scope: Construct,
                   selected: Optional[Iterable[str]] = None) -> Dict[str, Stack]:
        """
        Build the selected stacks in deployment order.

        A consumer gets a stack dependency on each producer that is built in
        the same run.

        Returns:
            The built stacks by node name, in deployment order
        """
        stacks: Dict[str, Stack] = {}
        for node in self.order(selected):
            stack = node.factory(scope)
            for family in sorted(node.reads, key=lambda f: f.value):
                producer = self.producer_of(family)
                if producer in stacks and producer != node.name:
                    stack.add_dependency(stacks[producer])
            stacks[node.name] = stack
        return stacks
