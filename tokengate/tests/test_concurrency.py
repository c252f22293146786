import threading

from tokengate.errors import TokenGateError


def test_parallel_transfers_and_admin_toggles(funded, owner, accounts):
    alice, bob = accounts["alice"], accounts["bob"]
    stop = threading.Event()
    errors = []

    def mover(src, dst):
        for _ in range(300):
            try:
                funded.transfer(src, dst, 1)
            except TokenGateError:
                pass
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

    def admin():
        while not stop.is_set():
            funded.pause(owner)
            funded.blacklist(owner, alice)
            funded.unpause(owner)
            funded.whitelist(owner, alice)

    workers = [
        threading.Thread(target=mover, args=(alice, bob)),
        threading.Thread(target=mover, args=(bob, alice)),
    ]
    toggler = threading.Thread(target=admin)
    toggler.start()
    for w in workers:
        w.start()
    for w in workers:
        w.join()
    stop.set()
    toggler.join()

    assert errors == []
    assert funded.balance_of(alice) + funded.balance_of(bob) == 2_000
    assert sum(v for _, v in funded.ledger.holders()) == funded.total_supply()
