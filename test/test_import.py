from abc import ABCMeta

import evermark


def test_import():
    # make sure symbols are accessible by fully qualified path
    assert isinstance(evermark.core.Evermark, type)
    assert isinstance(evermark.core.store.MappingStore, type)
    assert isinstance(evermark.core.gateway.BaseGateway, ABCMeta)
    assert issubclass(evermark.core.etapi.EtapiGateway, evermark.BaseGateway)
    assert issubclass(evermark.core.exceptions.StoreIOError, evermark.EvermarkError)

    # ensure no internal symbols accidentally exported
    assert all([not sym.startswith("_") for sym in evermark.__all__])
