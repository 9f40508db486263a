# PATH: tests/unit/test_imports_contract.py
"""
Import contract smoke tests.

PURPOSE: Catch ImportError regressions EARLY.
RUN FIRST: python -m pytest tests/unit/test_imports_contract.py -v
"""

import unittest


class TestPackageImports(unittest.TestCase):
    """Public names stay importable from package roots."""

    def test_core(self):
        from core import (
            AllProvidersUnavailableError,
            ErrorCode,
            InvalidArgumentError,
            TransactionRecord,
            TxStatus,
        )
        self.assertTrue(issubclass(AllProvidersUnavailableError, Exception))
        self.assertTrue(issubclass(InvalidArgumentError, Exception))
        self.assertEqual(TxStatus.SUCCEEDED.value, "SUCCEEDED")
        self.assertIn("hash", TransactionRecord.__dataclass_fields__)
        self.assertEqual(ErrorCode.CONFIG_ERROR.value, "CONFIG_ERROR")

    def test_chains(self):
        from chains import ChainQueryService, EndpointPool, FailoverExecutor, RPCEndpoint
        self.assertTrue(callable(ChainQueryService.from_urls))
        self.assertTrue(callable(EndpointPool.from_urls))
        self.assertTrue(callable(FailoverExecutor))
        self.assertTrue(callable(RPCEndpoint))

    def test_indexer(self):
        from indexer import SubgraphClient, compare_with_indexer
        self.assertTrue(callable(SubgraphClient))
        self.assertTrue(callable(compare_with_indexer))

    def test_cli(self):
        import query_cli
        self.assertEqual(
            set(query_cli.main.commands),
            {"tx", "address", "block", "height", "compare"},
        )


if __name__ == "__main__":
    unittest.main()
