from lyric_keyframes.cli import main

main()
