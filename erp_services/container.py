"""
erp_services.container -- Central DI container for the ERP services.

Responsibility:
    Creates every repository and service exactly once from an
    ``ErpConfig`` and wires them together.  No service creates other
    services internally.

Architecture position:
    Services -- the top of the stack.  The only place where stores,
    codecs, repositories, the ledger state machine and the module
    services are constructed and composed.

Invariants enforced:
    - Single-instance lifecycle: one repository per collection, one
      ``LedgerStateMachine`` shared by payables and receivables.
    - Every service shares the same Clock and CatalogService instances.
    - ``persistence.database_url`` selects the store: None keeps data in
      memory, a URL initialises the kernel engine and the ``kv_entries``
      table.

Failure modes:
    - Loading errors from the stored collections propagate
      (MalformedDocumentError, UnknownStatusError, PersistenceError).

Usage:
    from erp_services.container import ErpContainer

    container = ErpContainer.build(get_active_config(), clock=clock)
    container.orders.create_document(DocumentKind.QUOTE, "ACME", clock.today())
    container.payables.record_payment(doc_id, "100.00", clock.today(), "pix")
    container.cashflow.projection()
"""

from __future__ import annotations

from erp_config import ErpConfig
from erp_engines.ledger import LedgerStateMachine
from erp_kernel.db import create_tables, get_session, init_engine_from_url
from erp_kernel.domain.clock import Clock, SystemClock
from erp_kernel.logging_config import get_logger
from erp_modules.cashflow import CashFlowService
from erp_modules.catalog import CatalogService
from erp_modules.ledger import LEDGER_WORKFLOW, LedgerDirection, LedgerService
from erp_modules.orders import DocumentKind, OrderService
from erp_services.persistence import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from erp_services.repository import DocumentRepository
from erp_services.serialization import ledger_codec, order_codec

logger = get_logger("services.container")


class ErpContainer:
    """Factory and holder for the wired services.

    Contract:
        Receives a config, a store, a clock and a catalog.  Exposes
        ``orders``, ``payables``, ``receivables``, ``cashflow`` and
        ``catalog`` as public attributes.
    """

    def __init__(
        self,
        config: ErpConfig,
        store: KeyValueStore,
        clock: Clock | None = None,
        catalog: CatalogService | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.clock = clock or SystemClock()
        self.catalog = catalog or CatalogService()

        keys = config.persistence
        prefixes = config.numbering

        self.order_repositories = {
            kind: DocumentRepository(store, keys.key_for(kind.collection), order_codec(kind))
            for kind in DocumentKind
        }
        self.ledger_repositories = {
            direction: DocumentRepository(store, keys.key_for(direction.collection), ledger_codec(direction))
            for direction in LedgerDirection
        }

        self.ledger_machine = LedgerStateMachine(
            LEDGER_WORKFLOW,
            allow_overpayment=config.ledger.allow_overpayment,
            lock_original_amount_after_payment=config.ledger.lock_original_amount_after_payment,
        )

        self.orders = OrderService(
            self.order_repositories,
            self.catalog,
            currency=config.currency,
            prefixes={kind: prefixes.prefix_for(kind.collection) for kind in DocumentKind},
            clock=self.clock,
        )
        self.payables = self._ledger_service(LedgerDirection.PAYABLE)
        self.receivables = self._ledger_service(LedgerDirection.RECEIVABLE)
        self.cashflow = CashFlowService(
            self.payables,
            self.receivables,
            clock=self.clock,
            window_days=config.cashflow.window_days,
        )

        logger.info("erp_container_built", extra={
            "config_name": config.name,
            "currency": config.currency,
            "store": type(store).__name__,
        })

    def _ledger_service(self, direction: LedgerDirection) -> LedgerService:
        return LedgerService(
            direction,
            self.ledger_repositories[direction],
            self.catalog,
            self.ledger_machine,
            currency=self.config.currency,
            prefix=self.config.numbering.prefix_for(direction.collection),
            clock=self.clock,
        )

    def ledger(self, direction: LedgerDirection) -> LedgerService:
        return self.payables if direction is LedgerDirection.PAYABLE else self.receivables

    @classmethod
    def build(
        cls,
        config: ErpConfig,
        *,
        store: KeyValueStore | None = None,
        clock: Clock | None = None,
        catalog: CatalogService | None = None,
    ) -> ErpContainer:
        """Choose the store from config unless one is given."""
        if store is None:
            url = config.persistence.database_url
            if url is None:
                store = InMemoryKeyValueStore()
            else:
                init_engine_from_url(url)
                create_tables()
                store = SqlKeyValueStore(get_session, clock=clock)
        return cls(config, store, clock=clock, catalog=catalog)
