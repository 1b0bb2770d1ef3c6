from rigpreview import LocalHost, PhysBone, PreviewSession, Scene

from examples.components import EarSway, build_fox


def main() -> None:
    fox = build_fox()
    host = LocalHost(Scene("Main", fox), reload_on_exit=True)
    session = PreviewSession.create(host)

    tail = fox.find_child("Armature").find_child("Tail")  # type: ignore[union-attr]
    session.request_start(node=tail)
    print(f"Previewing {session.original_root.name!r} in {session.mode.name} mode")  # type: ignore[union-attr]

    copy = session.clone_root
    armature = copy.find_child("Armature")  # type: ignore[union-attr]
    armature.find_child("Tail").get_component(PhysBone).gravity = 0.6  # type: ignore[union-attr]
    ear = armature.find_child("Head").find_child("EarL")  # type: ignore[union-attr]
    ear.get_component(EarSway).amplitude = 0.25  # type: ignore[union-attr]

    session.save()
    print(f"Pending: {session.pending_change_set().property_count} properties")  # type: ignore[union-attr]
    session.request_exit()
    host.run_pending()

    # The host rebuilt every node; look the rig up again
    fox = host.scenes()[0].roots[0]
    armature = fox.find_child("Armature")  # type: ignore[union-attr]
    print(f"Tail gravity: {armature.find_child('Tail').get_component(PhysBone).gravity}")  # type: ignore[union-attr]
    ear = armature.find_child("Head").find_child("EarL")  # type: ignore[union-attr]
    print(f"Ear amplitude: {ear.get_component(EarSway).amplitude}")  # type: ignore[union-attr]
    print(f"Notifications: {host.notifications}")

    session.dispose()


if __name__ == "__main__":
    main()
